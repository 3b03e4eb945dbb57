"""
Services - business logic over the account store and MongoDB.

Each service is a thin class around its collections; routes build one
per request through the get_*_service() factories.
"""
