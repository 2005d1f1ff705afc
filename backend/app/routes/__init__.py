# Routes package init
"""
DevCamper Backend — API Routes Package
========================================

Route Inventory:
    - bootcamps.py: GET/POST   /api/v1/bootcamps
                    GET        /api/v1/bootcamps/radius/{zipcode}/{distance}
                    GET/PUT/DELETE /api/v1/bootcamps/{id}
                    PUT        /api/v1/bootcamps/{id}/photo
    - courses.py:   GET/POST   /api/v1/bootcamps/{bootcamp_id}/courses
                    GET        /api/v1/courses
                    GET/PUT/DELETE /api/v1/courses/{id}
    - files.py:     GET        /uploads/{filename}
    - health.py:    GET        /health

Routes stay thin: read the request, call a service, wrap the result.
"""
