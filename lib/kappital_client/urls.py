from __future__ import annotations

import re
from typing import Any

# Deploy the service package into the cluster.
DEPLOY_SERVICE_URL = "%v/api/v1alpha1/servicebinding"
DEPLOY_INSTANCE_URL = "%v/api/v1alpha1/servicebinding/%v/instance?cluster_name=%v"

GET_INSTANCES_URL = "%v/api/v1alpha1/servicebinding/%v/instance"
# The second hole is either empty (list) or "/<service-name>". The query string
# must start with cluster_name so that "&detail=true" can be appended.
GET_SERVICE_URL = "%v/api/v1alpha1/servicebinding%v?cluster_name=%v"
GET_SERVICES_URL = "%v/api/v1alpha1/servicebinding?cluster_name=%v"

DELETE_INSTANCE_URL = "%v/api/v1alpha1/servicebinding/%v/instance/%v?cluster_name=%v"
DELETE_SERVICE_URL = "%v/api/v1alpha1/servicebinding/%v?cluster_name=%v"

DETAIL_SUFFIX = "&detail=true"

_HOLE = re.compile(r"%v")


def fill_template(template: str, *args: Any) -> str:
    holes = len(_HOLE.findall(template))
    if holes != len(args):
        raise ValueError(f"url template expects {holes} arguments, got {len(args)}")
    values = iter(args)
    return _HOLE.sub(lambda _: str(next(values)), template)


def build_manager_url(base_url: str, template: str, *args: Any) -> str:
    """Fill ``template`` with the manager base url followed by ``args``.

    No escaping is performed; arguments are validated upstream.
    """
    return fill_template(template, base_url, *args)
