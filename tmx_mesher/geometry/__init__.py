"""Render meshes for tile layers and collider geometry for map objects"""

from .layer_mesh import LayerMesh, TextureGroup, build_layer_mesh
from .colliders import (
    BoxCollider, CapsuleCollider, MeshCollider,
    build_collider, generate_colliders,
)

__all__ = [
    "LayerMesh", "TextureGroup", "build_layer_mesh",
    "BoxCollider", "CapsuleCollider", "MeshCollider",
    "build_collider", "generate_colliders",
]
