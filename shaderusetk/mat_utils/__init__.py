# !/usr/bin/python
# coding=utf-8
"""Material and shader utilities.

All classes are lazy-loaded via shaderusetk root package.
Import from shaderusetk directly: from shaderusetk import ShaderUsageIndexer, etc.
"""

# Lazy-loaded via parent package - no explicit imports needed
