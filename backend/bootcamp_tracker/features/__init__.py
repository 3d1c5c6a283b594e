"""Feature modules of the tracker worker."""
