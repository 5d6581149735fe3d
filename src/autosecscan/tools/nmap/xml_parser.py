"""Nmap XML output parser."""

import xml.etree.ElementTree as ET

from autosecscan.models import Port


def parse_nmap_xml(xml_data: str) -> list[Port]:
    """Parse nmap XML output into the open ports of every scanned host."""
    try:
        root = ET.fromstring(xml_data)
    except ET.ParseError as exc:
        raise ValueError(f"failed to parse nmap output: {exc}") from exc

    ports: list[Port] = []
    for host in root.findall("host"):
        ports_elem = host.find("ports")
        if ports_elem is None:
            continue
        for port in ports_elem.findall("port"):
            port_result = _parse_port(port)
            if port_result and port_result.state == "open":
                ports.append(port_result)
    return ports


def _parse_port(port_elem) -> Port | None:
    """Parse a single port element from nmap XML."""
    portid = port_elem.get("portid", "")
    protocol = port_elem.get("protocol", "")

    state_elem = port_elem.find("state")
    state = state_elem.get("state", "") if state_elem is not None else ""

    service = ""
    version = ""
    service_elem = port_elem.find("service")
    if service_elem is not None:
        service = service_elem.get("name", "")
        product = service_elem.get("product", "")
        detail = service_elem.get("version", "")
        version = f"{product} {detail}".strip() if detail else product

    try:
        port_num = int(portid)
    except ValueError:
        return None

    return Port(
        number=port_num,
        protocol=protocol,
        state=state,
        service=service,
        version=version,
    )
