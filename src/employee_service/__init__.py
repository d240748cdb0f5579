"""Shop retail employee service.

Feature modules (employees, attendance) each carry their own model,
repository interface, MySQL repository, use-case service and a thin Flask
controller. Business rules live in the services only.
"""

__version__ = "0.3.0"
