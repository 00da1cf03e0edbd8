"""
core - Records, dataset generation and configuration

    constants : default dataset sizes and runner settings
    records   : Parent / Child records, NotFoundError and the deterministic
                dataset generator (ordered sequences and id-keyed dicts)
    config    : BenchConfig and YAML loading
"""
