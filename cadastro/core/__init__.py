"""
Core utilities shared across the cadastro package.

This package hosts configuration helpers (env vars, storage paths) and the
logging setup. Services and repositories depend on these primitives instead
of reading os.environ directly.
"""
