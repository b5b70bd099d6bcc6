"""Interactive selector for kubeconfig files."""
