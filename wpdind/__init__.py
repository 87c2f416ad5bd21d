"""wp-dind - WordPress instance manager for Docker-in-Docker workspaces"""

__version__ = "1.0.0"
