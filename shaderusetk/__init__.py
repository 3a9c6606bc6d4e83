# !/usr/bin/python
# coding=utf-8
from pythontk.core_utils.module_resolver import bootstrap_package


__package__ = "shaderusetk"
__version__ = "0.1.0"

"""Dynamic Attribute Resolver for Module-based Packages

``bootstrap_package`` wires a :class:`ModuleAttributeResolver` into this package so the
indexer, the Maya host and the panel classes resolve lazily from the package root
(``shaderusetk.ShaderUsageIndexer``) without importing Maya until they are used.
"""

DEFAULT_INCLUDE = {
    "mat_utils.shader_usage": [
        "ShaderUsageIndexer",
        "SceneHost",
        "UsageIndex",
        "UsageRecord",
        "ShaderGroup",
    ],
    "mat_utils.maya_scene_host": "MayaSceneHost",
    "mat_utils.find_used_shaders": [
        "FindUsedShaders",
        "FindUsedShadersSlots",
    ],
}

bootstrap_package(
    globals(),
    include=DEFAULT_INCLUDE,
)
