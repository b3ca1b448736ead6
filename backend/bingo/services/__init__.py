"""Data service backends.

The realtime layer never stores rooms, cards or draws itself; it calls a
:class:`DataService`. ``local`` keeps everything in the app's SQL database,
``ords`` forwards to the remote REST data service.
"""

from .data_service import DataService, build_data_service

__all__ = ['DataService', 'build_data_service']
