"""Release session services: resolve, plan, prepare, build, publish, announce."""
