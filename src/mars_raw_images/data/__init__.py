"""Remote manifest/catalog access, normalization and the image cache."""
