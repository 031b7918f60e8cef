"""Sample catalog/ordering application built on the ``datastore`` package."""
