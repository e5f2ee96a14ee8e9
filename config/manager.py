"""Konfigurationsmanager: AppConfig als kommentiertes YAML plus benannte Szenarien.

Aktive Konfiguration: config/app_config.yaml
Szenarien:            scenarios/<name>.yaml (+ optional <name>.meta.yaml)
"""

import json
from datetime import date
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ValidationError
from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap

from config.schema import AppConfig

yaml = YAML()
yaml.default_flow_style = False
yaml.width = 120

_HEADER = """\
# ============================================
# Stundenplan-Backtracking — Konfiguration
# ============================================
"""

# Abschnitt → (Überschrift, Hinweis)
_SECTIONS = {
    "timetable": (
        "Wochenraster",
        "Stunden-Indizes sind 0-basiert. lunch_period wird nie belegt.",
    ),
    "switches": (
        "Regeln",
        "avoid_consecutive wirkt als harter Filter, nicht als Strafpunkt.",
    ),
    "solver": (
        "Such-Budget",
        "null = unbegrenzt. Bei Überschreitung: Abbruch (search_aborted).",
    ),
}


class ScenarioInfo(BaseModel):
    """Eintrag der Szenario-Liste."""
    name: str
    path: str
    description: str = ""
    created: str = ""


class ConfigManager:
    CONFIG_DIR = Path("config")
    DEFAULT_CONFIG = CONFIG_DIR / "app_config.yaml"
    SCENARIOS_DIR = Path("scenarios")

    def __init__(self, config_path: Optional[Path] = None,
                 scenarios_dir: Optional[Path] = None) -> None:
        if config_path is not None:
            self.DEFAULT_CONFIG = Path(config_path)
        if scenarios_dir is not None:
            self.SCENARIOS_DIR = Path(scenarios_dir)

    def first_run_check(self) -> bool:
        """True, solange noch keine aktive Konfiguration gespeichert wurde."""
        return not self.DEFAULT_CONFIG.exists()

    # ─── Lesen ───

    def load(self, path: Optional[Path] = None) -> AppConfig:
        """Liest eine YAML-Datei und validiert sie als AppConfig.

        Raises:
            FileNotFoundError: Datei fehlt.
            ValueError: Inhalt verletzt das Schema.
        """
        source = Path(path) if path else self.DEFAULT_CONFIG
        if not source.exists():
            raise FileNotFoundError(
                f"Konfigurationsdatei nicht gefunden: {source}\n"
                f"Anlegen mit 'python main.py config init'."
            )
        with open(source, "r", encoding="utf-8") as f:
            raw = yaml.load(f) or {}
        # CommentedMap → reine dicts (Datumswerte als ISO-String)
        plain = json.loads(json.dumps(raw, default=str))
        try:
            return AppConfig.model_validate(plain)
        except ValidationError as e:
            raise ValueError(f"Konfigurationsdatei ungültig: {source}\n{e}") from e

    def load_or_default(self, path: Optional[Path] = None) -> AppConfig:
        """load(), aber ohne Datei die Standard-Konfiguration."""
        from config.defaults import default_app_config
        source = Path(path) if path else self.DEFAULT_CONFIG
        return self.load(source) if source.exists() else default_app_config()

    # ─── Schreiben ───

    def save(self, config: AppConfig, path: Optional[Path] = None) -> Path:
        """Schreibt die Konfiguration mit Abschnitts-Kommentaren."""
        target = Path(path) if path else self.DEFAULT_CONFIG
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "w", encoding="utf-8") as f:
            f.write(_HEADER + "\n")
            yaml.dump(self._to_commented_map(config), f)
        return target

    def _to_commented_map(self, config: AppConfig) -> CommentedMap:
        doc = CommentedMap(json.loads(config.model_dump_json()))
        for key, (title, hint) in _SECTIONS.items():
            doc.yaml_set_comment_before_after_key(key, before=f"\n─── {title} ───\n{hint}")

        timetable = CommentedMap(doc["timetable"])
        timetable.yaml_add_eol_comment("nur Anzeige", "week_start")
        doc["timetable"] = timetable
        return doc

    # ─── Szenarien ───

    def _scenario_path(self, name: str) -> Path:
        return self.SCENARIOS_DIR / f"{name}.yaml"

    def _meta_path(self, name: str) -> Path:
        return self.SCENARIOS_DIR / f"{name}.meta.yaml"

    def save_scenario(self, config: AppConfig, name: str,
                      description: str = "") -> Path:
        """Speichert eine Konfiguration unter einem Namen (überschreibt)."""
        path = self.save(config, self._scenario_path(name))
        if description:
            with open(self._meta_path(name), "w", encoding="utf-8") as f:
                yaml.dump({
                    "description": description,
                    "created": date.today().isoformat(),
                }, f)
        return path

    def list_scenarios(self) -> list[ScenarioInfo]:
        """Alle gespeicherten Szenarien, alphabetisch."""
        if not self.SCENARIOS_DIR.exists():
            return []
        result = []
        for path in sorted(self.SCENARIOS_DIR.glob("*.yaml")):
            if path.name.endswith(".meta.yaml"):
                continue
            info = ScenarioInfo(name=path.stem, path=str(path))
            meta_path = self._meta_path(path.stem)
            if meta_path.exists():
                with open(meta_path, "r", encoding="utf-8") as f:
                    meta = yaml.load(f) or {}
                info.description = str(meta.get("description", ""))
                info.created = str(meta.get("created", ""))
            result.append(info)
        return result

    def load_scenario(self, name: str) -> AppConfig:
        path = self._scenario_path(name)
        if not path.exists():
            known = ", ".join(s.name for s in self.list_scenarios()) or "keine"
            raise FileNotFoundError(f"Szenario '{name}' nicht gefunden (vorhanden: {known}).")
        return self.load(path)

    def delete_scenario(self, name: str) -> None:
        """Entfernt ein Szenario samt Metadaten."""
        path = self._scenario_path(name)
        if not path.exists():
            raise FileNotFoundError(f"Szenario '{name}' nicht gefunden.")
        path.unlink()
        self._meta_path(name).unlink(missing_ok=True)
