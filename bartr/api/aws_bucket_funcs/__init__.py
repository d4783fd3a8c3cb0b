"""S3 helpers for chat attachments."""
