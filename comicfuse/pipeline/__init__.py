"""Pipeline package for page processing stages.

Modules:
- `adapter` — the single-method stage interfaces
- `runner` — sync/async stage pipelines and their builders
- `geometry` — corner ordering, perspective extraction, box drawing
- `panels` — Otsu/contour based panel detector
- `convert` — format-conversion stages (grayscale, data URLs, files)
- `orchestrator` — end-to-end page run writing artifacts

Subpackages:
- `ocr` — OCR engine wrapper and column-merge engine
- `translate` — translator interface and the Gemini implementation
- `typeset` — drawing translated text back onto the page
- `utils` — image IO, JSON artifacts, debug overlays
"""
