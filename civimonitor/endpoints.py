from __future__ import annotations

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, ClassVar

from civimonitor.models import ProbeTarget


class ProbeConfigError(ValueError):
    pass


@dataclass(frozen=True)
class CheckRequest:
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    data: dict[str, str] = field(default_factory=dict)


class EndpointResolver(ABC):
    """Builds the System.check request for one generation of the CiviCRM API."""

    cms_paths: ClassVar[dict[str, str]] = {}

    def rest_path(self, target: ProbeTarget) -> str:
        if target.rest_path:
            return target.rest_path
        path = self.cms_paths.get(target.cms or "")
        if not path:
            raise ProbeConfigError(
                "You must specify either a valid CMS or a REST endpoint path."
            )
        return path

    def _check_params(self, target: ProbeTarget) -> dict[str, Any]:
        return {"includeDisabled": True} if target.include_disabled else {}

    @abstractmethod
    def build(self, target: ProbeTarget) -> CheckRequest:
        ...


class Api4Resolver(EndpointResolver):
    # Every CMS routes api4 through the same ajax path, Joomla included.
    cms_paths = {
        "drupal": "civicrm/ajax/api4",
        "drupal8": "civicrm/ajax/api4",
        "wordpress": "civicrm/ajax/api4",
        "backdrop": "civicrm/ajax/api4",
        "joomla": "civicrm/ajax/api4",
    }

    def build(self, target: ProbeTarget) -> CheckRequest:
        url = f"{target.protocol}://{target.hostname}/{self.rest_path(target)}/System/check"
        # An empty PHP array encodes as [] rather than {}.
        params = self._check_params(target) or []
        return CheckRequest(
            url=url,
            headers={
                "Content-Type": "application/x-www-form-urlencoded",
                "X-Civi-Auth": f"Bearer {target.api_key}",
                "X-Civi-Key": target.site_key,
                "X-Requested-With": "XMLHttpRequest",
                "User-Agent": target.user_agent,
            },
            data={"params": json.dumps(params)},
        )


class Api3Resolver(EndpointResolver):
    cms_paths = {
        "drupal": "sites/all/modules/civicrm/extern/rest.php",
        "drupal8": "libraries/civicrm/extern/rest.php",
        "wordpress": "wp-content/plugins/civicrm/civicrm/extern/rest.php",
        "backdrop": "modules/civicrm/extern/rest.php",
        "joomla": "administrator/components/com_civicrm/civicrm/extern/rest.php",
    }

    def build(self, target: ProbeTarget) -> CheckRequest:
        url = f"{target.protocol}://{target.hostname}/{self.rest_path(target)}"
        options = {"sequential": 1, **self._check_params(target)}
        return CheckRequest(
            url=url,
            headers={
                "X-Requested-With": "XMLHttpRequest",
                "User-Agent": target.user_agent,
            },
            data={
                "entity": "System",
                "action": "check",
                "json": json.dumps(options),
                "key": target.site_key,
                "api_key": target.api_key,
            },
        )


RESOLVERS: dict[int, EndpointResolver] = {
    3: Api3Resolver(),
    4: Api4Resolver(),
}


def resolve_request(target: ProbeTarget) -> CheckRequest:
    return RESOLVERS[target.api_version].build(target)
