"""Keep track of kubeconfig files and switch the active one."""

__version__ = "0.1.0"
