"""Request and response models for the DevCamper API."""
