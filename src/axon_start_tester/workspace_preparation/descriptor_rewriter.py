"""Structured image rewrite for compose deployment descriptors."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path

import yaml

from .workspace_models import DescriptorError


def rewrite_descriptor_image(
    descriptor_path: Path | str,
    image_tag: str,
    services: Sequence[str] = (),
) -> tuple[str, ...]:
    """Point the selected compose services at ``image_tag`` and save the descriptor.

    With no explicit ``services``, every service declaring an ``image`` key is
    updated. Returns the names of the updated services in descriptor order.
    Comments in the original descriptor are not preserved, and YAML 1.1 scalars
    are written back as their resolved values: ``yes`` becomes ``true`` and an
    unquoted ``22:22`` becomes ``1342``. Quote such values in the descriptor.
    """
    path = Path(descriptor_path)
    if not path.exists():
        raise DescriptorError(f"Deployment descriptor not found: {path}")
    try:
        document = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise DescriptorError(f"Failed to parse deployment descriptor {path}: {exc}") from exc

    if not isinstance(document, dict):
        raise DescriptorError(f"Deployment descriptor root must be a mapping: {path}")
    declared_services = document.get("services")
    if not isinstance(declared_services, dict) or not declared_services:
        raise DescriptorError(f"Deployment descriptor declares no services: {path}")

    updated = _apply_image(declared_services, image_tag, services)
    if not updated:
        raise DescriptorError(f"No service in {path} declares an image to rewrite.")

    path.write_text(
        yaml.safe_dump(document, sort_keys=False, default_flow_style=False),
        encoding="utf-8",
    )
    return updated


def _apply_image(
    declared_services: dict, image_tag: str, selected: Sequence[str]
) -> tuple[str, ...]:
    if selected:
        missing = [name for name in selected if name not in declared_services]
        if missing:
            raise DescriptorError(
                f"Services not declared in deployment descriptor: {', '.join(missing)}"
            )
        targets = [name for name in declared_services if name in selected]
    else:
        targets = [
            name
            for name, definition in declared_services.items()
            if isinstance(definition, Mapping) and "image" in definition
        ]

    updated = []
    for name in targets:
        definition = declared_services[name]
        if definition is None:
            definition = {}
            declared_services[name] = definition
        if not isinstance(definition, dict):
            raise DescriptorError(f"Service '{name}' definition must be a mapping.")
        definition["image"] = image_tag
        updated.append(str(name))
    return tuple(updated)
