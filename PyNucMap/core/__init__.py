"""Core nucleosome positioning algorithms for PyNucMap.

- scanner: window scanning and adaptive binning
- refiner: peak coordinate refinement and tie-breaking
- statistics: occupancy and fuzziness of a called position
- engine: per-chromosome scan orchestration
- verification: overlap detection and centering verification
"""
