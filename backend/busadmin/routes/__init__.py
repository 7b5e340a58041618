"""
Bus Admin Backend — API Routes Package
========================================

Route Inventory:
    - auth.py:     POST   /login               (public)
                   POST   /admins              (token)
    - buses.py:    GET    /buses               (public)
                   GET    /buses/{id}          (public)
                   POST   /buses               (token, multipart)
                   PUT    /buses/{id}          (token, multipart)
                   DELETE /buses/{id}          (token)
    - uploads.py:  GET    /uploads/{filename}  (stored images)
    - health.py:   GET    /health

Routes stay thin: extract request data, call a service, return its result.
"""
