"""Base layer: decoding core, stream controllers and their ambient stack.

Subpackages are imported explicitly by callers; this module stays free of
import-time side effects.
"""
