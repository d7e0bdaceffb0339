"""
Platform plugin client application package.

Holds the resource API surface, the batching resource loader, and the
plugin storage pipeline.
"""
