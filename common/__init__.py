"""
Shared helpers: EPSG:3857 tile math (geo), value types (types),
JSON logging (logging_setup), query parsing + read/write lock (utils).
"""
