from .listener import Acceptor, Listener, TcpAcceptor

__all__ = ["Acceptor", "Listener", "TcpAcceptor"]
