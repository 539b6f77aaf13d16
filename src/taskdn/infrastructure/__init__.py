"""Infrastructure layer: file I/O and directory scans."""
