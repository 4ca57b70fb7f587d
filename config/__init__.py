# config package: authoritative source for all pipeline configuration.
#
# Sub-modules:
#   generation_params.py : synthetic data generation truth and attribute distributions
#   model_params.py      : fitter and inference constants (IRLS, clamping, confidence)
#
# Reporting targets and output paths live in src/analysis/config.py so that
# the generation truth is never reused as a validation target.
