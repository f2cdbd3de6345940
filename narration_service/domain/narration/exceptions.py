from __future__ import annotations


class NarrationError(Exception):
    def __init__(self, message: str, status_code: int = 500) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class VisitorNotFound(NarrationError):
    def __init__(self, visitor_id: object) -> None:
        super().__init__(f"Visitor {visitor_id} is not registered", status_code=404)
        self.visitor_id = visitor_id


class PoiNotFound(NarrationError):
    def __init__(self, poi_code: str) -> None:
        super().__init__(f"Point of interest {poi_code!r} is unknown or inactive", status_code=404)
        self.poi_code = poi_code


class InvalidCoordinate(NarrationError, ValueError):
    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=422)


class CatalogError(NarrationError):
    def __init__(self, message: str, *, path: object = None) -> None:
        super().__init__(message, status_code=500)
        self.path = path
