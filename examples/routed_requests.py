"""
Selective Tunnel Routing Example

Send requests where only whitelisted hosts go through the SOCKS5 tunnel.
Start a tunnel first, e.g. `ssh -N -D 1080 user@jump-host`.
"""
from tunnelroute.core.config.store import MemoryConfigStore, save_settings
from tunnelroute.core.models.tunnel import ProxyConfig
from tunnelroute.plugins.network import RoutedClient
from tunnelroute.plugins.tunnel import TunnelHealthChecker


def main():
    store = MemoryConfigStore()
    save_settings(store, {
        "tunnel_host": "127.0.0.1",
        "tunnel_port": 1080,
        "whitelist_domains": "api.ipify.org",
    })

    status = TunnelHealthChecker().check_tunnel(ProxyConfig.from_store(store))
    print(f"{status.message} (external IP: {status.external_ip})")
    if not status.is_operational:
        return

    client = RoutedClient(store)

    # Whitelisted: goes through the tunnel
    print("Tunneled:", client.get("https://api.ipify.org?format=json").json())

    # Not whitelisted: sent directly
    print("Direct:", client.get("https://httpbin.org/ip").json())

    # Flip the switch; the next request picks it up
    save_settings(store, {"route_all": True})
    print("Route all:", client.get("https://httpbin.org/ip").json())


if __name__ == "__main__":
    main()
