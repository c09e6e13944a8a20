"""Materials module.

Components:
    phong: Phong-like material with emissive, ambient, diffuse and specular
        terms plus the reflectivity, transmissivity and refractive index
        read by the recursive tracer.
"""

from .phong import AIR, AIR_MATERIAL_ID, Material

__all__ = [
    "Material",
    "AIR",
    "AIR_MATERIAL_ID",
]
