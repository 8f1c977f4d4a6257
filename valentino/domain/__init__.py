"""Domain packages - one per business area (repository, service, router, schemas)"""
