"""Infrastructure: configuration, logging, persistence, remote catalog client."""
