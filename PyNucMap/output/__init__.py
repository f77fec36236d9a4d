"""Writers for nucleosome call tables and verification summaries."""
