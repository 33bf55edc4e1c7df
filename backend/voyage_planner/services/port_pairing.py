"""Port-of-discharge derivation for the voyage form.

The route network is two ports served in both directions, so choosing a
port of loading fixes the port of discharge.  The discharge field is
read-only in the form and always comes from here.
"""

PORTS: tuple[str, ...] = ("Copenhagen", "Oslo")

PORT_PAIRS: dict[str, str] = {
    "Copenhagen": "Oslo",
    "Oslo": "Copenhagen",
}


def paired_port_of_discharge(port_of_loading: str | None) -> str:
    """Return the discharge port for a loading port, or "" when unpaired."""
    if not port_of_loading:
        return ""
    return PORT_PAIRS.get(port_of_loading, "")
