"""Name-based lookup of the geocoders that report legislative districts."""

from typing import Optional

from represent.config import Settings

from .base import GeocodeService


class GeocodeServiceRegistry:
    """Registry of geocoding services, keyed by ``service_name``."""

    _services: dict[str, type[GeocodeService]] = {}

    @classmethod
    def register(cls, service_class: type[GeocodeService]) -> type[GeocodeService]:
        """Class decorator that makes a geocoder selectable by name.

        Example:
            @GeocodeServiceRegistry.register
            class CensusGeocoder(GeocodeService):
                ...
        """
        # service_name is a plain property that ignores self
        name = service_class.service_name.fget(None)  # type: ignore
        cls._services[name] = service_class
        return service_class

    @staticmethod
    def is_enabled(name: str, settings: Settings) -> bool:
        service_config = getattr(settings.geocode_services, name, None)
        return service_config is None or service_config.enabled

    @classmethod
    def get_service(cls, name: str, settings: Settings) -> GeocodeService:
        """Instantiate a service by name.

        Raises:
            ValueError: If the name is not registered or the service is
                disabled in ``settings.geocode_services``
        """
        service_class = cls._services.get(name)
        if service_class is None:
            raise ValueError(
                f"Unknown geocoding service: {name}. "
                f"Available services: {', '.join(cls.list_services())}"
            )
        if not cls.is_enabled(name, settings):
            raise ValueError(f"Geocoding service {name} is disabled")
        return service_class(settings)

    @classmethod
    def for_settings(cls, settings: Settings) -> GeocodeService:
        """The service selected by ``settings.geocode_service``."""
        return cls.get_service(settings.geocode_service, settings)

    @classmethod
    def list_services(cls, settings: Optional[Settings] = None) -> list[str]:
        """Registered service names; only enabled ones when ``settings`` is given."""
        names = sorted(cls._services)
        if settings is None:
            return names
        return [n for n in names if cls.is_enabled(n, settings)]
