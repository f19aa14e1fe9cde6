"""OTP primitives: code generation, storage and the background sweeper."""
