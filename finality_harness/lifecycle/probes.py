import asyncio


def parse_address(address: str) -> tuple[str, int]:
    """Split a "host:port" listener address, tolerating a URL scheme prefix."""
    if "://" in address:
        address = address.split("://", 1)[1]

    host, _, port = address.rstrip("/").rpartition(":")
    if not host or not port:
        raise ValueError(f"Invalid address '{address}'")

    return host, int(port)


async def tcp_probe(host: str, port: int, timeout: float = 1.0) -> bool:
    """Succeeds once something accepts TCP connections on host:port. Raises otherwise."""
    _, writer = await asyncio.wait_for(
        asyncio.open_connection(host, port),
        timeout=timeout,
    )

    writer.close()
    await writer.wait_closed()

    return True
