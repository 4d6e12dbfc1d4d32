"""Record mappers: header-keyed rows in, immutable domain records out."""
