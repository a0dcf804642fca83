from dataclean.config_model.model import load_config
cfg = load_config()  # $DATACLEAN_CFG or config/config.toml
print("Type sample size:", cfg.profiling.type_sample_size)
print("Preview rows:", cfg.profiling.preview_rows)
print("Phone region / mode:", cfg.profiling.phone_region, cfg.profiling.phone_validation)
print("Score weights:", cfg.scoring.weights.model_dump())
print("Outlier denominator:", cfg.scoring.outlier_denominator)
print("Fuzzy duplicates:", cfg.fuzzy.enabled, cfg.fuzzy.similarity_threshold, cfg.fuzzy.max_rows)
print("Jobs store:", cfg.jobs.store_path, cfg.jobs.timezone)
