# Services package init
"""
DevCamper Backend — Services Layer
====================================

Service Inventory:
    - query_parser:      query string → ResourceQuery (ComparisonExpr per field)
    - sql_filters:       ResourceQuery → SQLAlchemy WHERE / ORDER BY
    - advanced_results:  the reusable filtered, paginated, populated listing
    - geo:               spherical helpers for the radius search
    - geocoder_base:     Geocoder interface; geocoding_service: MapQuest client
    - lookups:           by-id fetch with uniform 404s
    - file_service:      photo validation, storage and lookup
    - bootcamp_service:  bootcamp CRUD, radius search, photo upload
    - course_service:    course CRUD and average-cost recompute
"""
