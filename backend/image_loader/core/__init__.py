# image_loader/core/__init__.py
"""
Core application modules.
Contains essential infrastructure components:
- db: Database configuration and connection management
- errors: Error taxonomy shared by stores, controller and API
- security: Password hashing and identity token codec
"""
