"""Single and multi-process drivers for nucleosome positioning."""
