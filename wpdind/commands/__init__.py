"""wp-dind CLI commands."""
