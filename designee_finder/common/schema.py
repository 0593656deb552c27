"""Minimal strict schemas for YAML config validation."""

from __future__ import annotations

from designee_finder.common.errors import ConfigError


def _assert_mapping(obj, ctx: str) -> None:
    if not isinstance(obj, dict):
        raise ConfigError(f"{ctx} must be a mapping")


def _assert_required_keys(obj: dict, required: set[str], ctx: str) -> None:
    missing = required - set(obj)
    if missing:
        missing_str = ", ".join(sorted(missing))
        raise ConfigError(f"Missing keys in {ctx}: {missing_str}")


def _assert_no_unknown_keys(obj: dict, known: set[str], ctx: str, allow_unknown: bool) -> None:
    if allow_unknown:
        return
    unknown = set(obj) - known
    if unknown:
        unknown_str = ", ".join(sorted(unknown))
        raise ConfigError(f"Unknown keys in {ctx}: {unknown_str}")


def _assert_positive_int(value, ctx: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigError(f"{ctx} must be a positive integer")


def _assert_name_list(value, ctx: str) -> None:
    if not isinstance(value, list) or not value or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"{ctx} must be a non-empty list of column names")


def validate_settings_config(cfg: dict, *, allow_unknown: bool = False) -> dict:
    _assert_mapping(cfg, "settings")
    top_required = {"registry", "cache", "coordinates"}
    _assert_required_keys(cfg, top_required, "settings")
    _assert_no_unknown_keys(cfg, top_required, "settings", allow_unknown)

    registry = cfg["registry"]
    _assert_mapping(registry, "registry")
    registry_required = {
        "search_url",
        "category_id",
        "country_id",
        "is_location_search",
        "page_rows",
        "timeout",
    }
    _assert_required_keys(registry, registry_required, "registry")
    _assert_no_unknown_keys(registry, registry_required, "registry", allow_unknown)
    if not isinstance(registry["search_url"], str) or not registry["search_url"].startswith(("http://", "https://")):
        raise ConfigError("registry.search_url must be an http(s) URL")
    _assert_positive_int(registry["category_id"], "registry.category_id")
    _assert_positive_int(registry["country_id"], "registry.country_id")
    _assert_positive_int(registry["page_rows"], "registry.page_rows")
    if not isinstance(registry["is_location_search"], bool):
        raise ConfigError("registry.is_location_search must be a boolean")
    _assert_mapping(registry["timeout"], "registry.timeout")
    _assert_required_keys(registry["timeout"], {"connect", "read"}, "registry.timeout")
    for key in ("connect", "read"):
        value = registry["timeout"][key]
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
            raise ConfigError(f"registry.timeout.{key} must be a positive number")

    cache = cfg["cache"]
    _assert_mapping(cache, "cache")
    cache_required = {"dir", "filename_template"}
    _assert_required_keys(cache, cache_required, "cache")
    _assert_no_unknown_keys(cache, cache_required, "cache", allow_unknown)
    if cache["dir"] is not None and not isinstance(cache["dir"], str):
        raise ConfigError("cache.dir must be a path or null")
    template = cache["filename_template"]
    if not isinstance(template, str) or "{category_id}" not in template or "/" in template:
        raise ConfigError("cache.filename_template must be a file name containing {category_id}")

    coordinates = cfg["coordinates"]
    _assert_mapping(coordinates, "coordinates")
    coordinates_required = {
        "path",
        "geonames_url",
        "geonames_member",
        "postal_code_candidates",
        "lat_candidates",
        "lon_candidates",
    }
    _assert_required_keys(coordinates, coordinates_required, "coordinates")
    _assert_no_unknown_keys(coordinates, coordinates_required, "coordinates", allow_unknown)
    if coordinates["path"] is not None and (not isinstance(coordinates["path"], str) or not coordinates["path"]):
        raise ConfigError("coordinates.path must be a path or null")
    geonames_url = coordinates["geonames_url"]
    if not isinstance(geonames_url, str) or not geonames_url.startswith(("http://", "https://")):
        raise ConfigError("coordinates.geonames_url must be an http(s) URL")
    if not isinstance(coordinates["geonames_member"], str) or not coordinates["geonames_member"]:
        raise ConfigError("coordinates.geonames_member must be a non-empty string")
    for key in ("postal_code_candidates", "lat_candidates", "lon_candidates"):
        _assert_name_list(coordinates[key], f"coordinates.{key}")

    return cfg
