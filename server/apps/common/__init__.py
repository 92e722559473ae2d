"""Code shared between the apps that is not an app itself."""
