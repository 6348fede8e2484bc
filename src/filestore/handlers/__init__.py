"""
Request handlers.

    dispatcher.py  MethodDispatcher: GET / HEAD / PUT / POST / DELETE / OPTIONS
                   mapped onto the file store

    from filestore.handlers import MethodDispatcher
    from filestore.storage import FileSystem, PathResolver

    dispatcher = MethodDispatcher(FileSystem(), PathResolver("public"))
    response = dispatcher.dispatch(request)
"""

from .dispatcher import MethodDispatcher, allowed_methods, BASE_ALLOWED_METHODS

__all__ = [
    "MethodDispatcher",
    "allowed_methods",
    "BASE_ALLOWED_METHODS",
]
