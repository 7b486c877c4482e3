"""DigitalOcean droplet metadata records.

Structure of the flat (v1) record, as served under /metadata/v1/:
    droplet_id      — numeric droplet id
    hostname
    vendor_data     — cloud-config text
    public_keys     — one key per line
    region
    interfaces/
      private       — private interfaces
      public        — public interfaces
    floating_ip/
      ipv4/
        active
    dns/
      nameservers   — one address per line

Private interfaces carry an untagged ipv4 field. It is loaded from JSON but
never appears in listings.
"""

import json
from dataclasses import dataclass, field

from errors import RecordError
from fields import load_record


def _tag(name: str) -> dict:
    return {"json": name}


@dataclass
class IPv4Address:
    ip_address: str = field(default="", metadata=_tag("ip_address"))
    netmask: str = field(default="", metadata=_tag("netmask"))
    gateway: str = field(default="", metadata=_tag("gateway"))


@dataclass
class IPv6Address:
    ip_address: str = field(default="", metadata=_tag("ip_address"))
    cidr: int = field(default=0, metadata=_tag("cidr"))
    gateway: str = field(default="", metadata=_tag("gateway"))


@dataclass
class PrivateInterface:
    ipv4: IPv4Address = field(default_factory=IPv4Address)
    mac: str = field(default="", metadata=_tag("mac"))
    type: str = field(default="", metadata=_tag("type"))


@dataclass
class PublicInterface:
    ipv4: IPv4Address = field(default_factory=IPv4Address, metadata=_tag("ipv4"))
    ipv6: IPv6Address = field(default_factory=IPv6Address, metadata=_tag("ipv6"))
    mac: str = field(default="", metadata=_tag("mac"))
    type: str = field(default="", metadata=_tag("type"))


@dataclass
class Interfaces:
    private: list[PrivateInterface] = field(default_factory=list, metadata=_tag("private"))
    public: list[PublicInterface] = field(default_factory=list, metadata=_tag("public"))


@dataclass
class FloatingIPv4:
    active: bool = field(default=False, metadata=_tag("active"))


@dataclass
class FloatingIP:
    ipv4: FloatingIPv4 = field(default_factory=FloatingIPv4, metadata=_tag("ipv4"))


@dataclass
class DNS:
    nameservers: list[str] = field(default_factory=list, metadata=_tag("nameservers"))


@dataclass
class DropletMetadata:
    droplet_id: int = field(default=0, metadata=_tag("droplet_id"))
    hostname: str = field(default="", metadata=_tag("hostname"))
    vendor_data: str = field(default="", metadata=_tag("vendor_data"))
    public_keys: list[str] = field(default_factory=list, metadata=_tag("public_keys"))
    region: str = field(default="", metadata=_tag("region"))
    interfaces: Interfaces = field(default_factory=Interfaces, metadata=_tag("interfaces"))
    floating_ip: FloatingIP = field(default_factory=FloatingIP, metadata=_tag("floating_ip"))
    dns: DNS = field(default_factory=DNS, metadata=_tag("dns"))


@dataclass
class MetadataVersions:
    v1: DropletMetadata = field(default_factory=DropletMetadata, metadata=_tag("v1"))


@dataclass
class DigitalOceanMetadata:
    """The whole tree, rooted above /metadata/v1/."""
    metadata: MetadataVersions = field(default_factory=MetadataVersions, metadata=_tag("metadata"))


SCHEMAS = {
    "droplet": DropletMetadata,
    "digitalocean": DigitalOceanMetadata,
}


def load_metadata(path: str, schema: str = "droplet"):
    """Load a JSON metadata document into the record type named by schema."""
    if schema not in SCHEMAS:
        raise RecordError(f"Unknown schema: {schema}. Known: {', '.join(sorted(SCHEMAS))}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, FileNotFoundError, OSError) as e:
        raise RecordError(f"Cannot read metadata file: {e}") from e
    return load_record(SCHEMAS[schema], data, "json")
