"""
Bus Admin Backend — Services Layer
====================================

What:  Business logic between routes (HTTP) and the database.
How:   Services are plain classes constructed once by the AppContext with
       their collaborators passed in; routes receive them via Depends().

Service Inventory:
    - UploadStore: image validation, storage, URL mapping and cleanup
    - BusService: bus CRUD and the image lifecycle tied to it
    - AuthService: admin login and bootstrap
"""
