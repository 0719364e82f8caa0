# toolflow/config package
# Runtime configuration (runtime.yaml + environment overrides).
