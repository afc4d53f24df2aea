"""API router subpackage for the publisher service.

Submodules:
    - uploads: Endpoints publishing PMTiles archives, directly or after
      converting GeoJSON with tippecanoe.
    - maps: Endpoints listing and deleting published archives.
    - errors: Exception handlers turning pipeline errors into JSON.
    - deps: Shared FastAPI dependencies.
"""
