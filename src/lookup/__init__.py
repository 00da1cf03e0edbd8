"""
lookup - Strategies for resolving a child's parent by id

    cached_find : memoizing finders (slot-array and dict caches)
    strategies  : the benchmarked strategies and the named registry the
                  runner consumes as (name, setup_fn) pairs
"""
