"""hookrelay - GitHub webhook to Discord notification relay"""
__version__ = "0.1.0"
