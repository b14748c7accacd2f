"""ragdesk: question answering over a private document corpus."""
