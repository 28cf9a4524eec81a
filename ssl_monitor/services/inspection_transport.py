"""
仅用于证书检查的TLS连接

这里的连接不验证证书链和主机名，只用于读取对端证书内容，
不得用于传输任何业务数据。
"""
import socket
import ssl
import time
from typing import Optional
import logging

from ..exceptions import SSLConnectionError, CheckTimeoutError

logger = logging.getLogger(__name__)


def create_inspection_context() -> ssl.SSLContext:
    """
    创建不验证信任链的SSL上下文

    Returns:
        ssl.SSLContext: 关闭证书链和主机名验证的上下文
    """
    context = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
    context.check_hostname = False
    context.verify_mode = ssl.CERT_NONE
    return context


def _connect_within_deadline(domain: str, port: int, deadline: float) -> socket.socket:
    """
    依次尝试DNS返回的每个地址，所有尝试共享同一个截止时间

    Returns:
        socket.socket: 已连接的套接字

    Raises:
        socket.timeout: 截止时间已到
        OSError: 所有地址都连接失败
    """
    addresses = socket.getaddrinfo(domain, port, 0, socket.SOCK_STREAM)
    last_error = None

    for family, socktype, proto, _, address in addresses:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise socket.timeout(f"timed out connecting to {domain}:{port}")

        sock = socket.socket(family, socktype, proto)
        try:
            sock.settimeout(remaining)
            sock.connect(address)
            return sock
        except OSError as e:
            sock.close()
            logger.debug(f"连接 {domain} 的地址 {address} 失败: {e}")
            last_error = e

    if last_error is not None:
        raise last_error
    raise OSError(f"getaddrinfo returned no addresses for {domain}")


def fetch_peer_certificate_for_inspection(domain: str, port: int = 443,
                                          timeout: float = 10) -> Optional[bytes]:
    """
    建立一次TLS握手并返回对端证书（DER格式）

    DNS解析、逐个地址的连接尝试和TLS握手共享同一个截止时间，
    超时后套接字被立即关闭。

    Args:
        domain: 目标主机名
        port: 端口，默认443
        timeout: 总超时时间（秒）

    Returns:
        Optional[bytes]: DER格式证书，对端未提供证书时为None

    Raises:
        CheckTimeoutError: 在截止时间内未完成握手
        SSLConnectionError: DNS、TCP或TLS层面的任何其他错误
    """
    context = create_inspection_context()
    deadline = time.monotonic() + timeout

    try:
        with _connect_within_deadline(domain, port, deadline) as sock:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise socket.timeout("timed out before TLS handshake")
            sock.settimeout(remaining)

            with context.wrap_socket(sock, server_hostname=domain) as ssock:
                logger.debug(f"与 {domain}:{port} 完成握手，协议版本: {ssock.version()}")
                return ssock.getpeercert(binary_form=True)

    except socket.timeout as e:
        raise CheckTimeoutError(domain, timeout, e) from e
    except OSError as e:
        # ssl.SSLError、socket.gaierror 和 ConnectionRefusedError 都是 OSError 的子类
        raise SSLConnectionError(domain, f"连接 {domain}:{port} 失败", e) from e
