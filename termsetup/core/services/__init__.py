"""Services — provisioning steps built on the adapter layer."""
