"""Publishing service for PMTiles map archives.

This package accepts uploaded geospatial files, converts vector data to
PMTiles with tippecanoe when needed, and publishes the archives to an S3
bucket. Published archives can be listed and deleted through the same API.

- Direct uploads of ``.pmtiles`` archives are published unchanged
- GeoJSON and other vector uploads are converted before publishing
- Staged files are removed after every request, successful or not
- The object store is built once per process and injected into routes

See module sub-docstrings for details on architecture and usage.
"""
