"""Konfigurationsmanager: Laden, Speichern und Profile.

Nutzt ruamel.yaml für YAML-Serialisierung mit Kommentaren.
"""

import json
from datetime import date
from pathlib import Path
from typing import Optional

from pydantic import ValidationError
from rich.console import Console
from rich.prompt import Confirm
from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap

from config.schema import PlannerConfig

console = Console()
yaml = YAML()
yaml.default_flow_style = False
yaml.width = 120

_PROFILE_INDEX = "profiles.yaml"


# ─── YAML-KOMMENTAR-AUFBAU ───

_YAML_HEADER = f"""\
# ============================================
# Unterrichtsplaner — Konfiguration
# Version: 1.0
# Erstellt: {date.today().isoformat()}
# ============================================
"""

_SECTION_COMMENTS = {
    "calendar": (
        "Kalender",
        "Unterrichtstage, Schuljahresbeginn und Suchgrenzen.\n"
        "Wochentage als Mon, Tue, Wed, Thu, Fri, Sat, Sun.",
    ),
    "sessions": (
        "Einheiten pro Termin / Monat",
        "Tabellen sind nach Unterrichtstagen pro Woche geschlüsselt.",
    ),
    "progression": (
        "Unit/Day-Fortschritt",
        "exhaustion_policy: flag = weiterzählen + Warnung, stop = kürzen.",
    ),
    "generator": (
        "Generator",
        None,
    ),
}


class ConfigManager:
    CONFIG_DIR = Path("config")
    DEFAULT_CONFIG = CONFIG_DIR / "planner_config.yaml"
    PROFILES_DIR = Path("profiles")

    def first_run_check(self) -> bool:
        """Gibt True zurück wenn noch keine Config existiert (Erstaufruf)."""
        return not self.DEFAULT_CONFIG.exists()

    # ─── Laden ───

    def load(self, path: Optional[Path] = None) -> PlannerConfig:
        """Lade Config aus YAML. Validiert automatisch via Pydantic."""
        target = path or self.DEFAULT_CONFIG
        if not target.exists():
            raise FileNotFoundError(
                f"Konfigurationsdatei nicht gefunden: {target}\n"
                f"Führen Sie 'python main.py init' aus, um die Akademie einzurichten."
            )
        with open(target, "r", encoding="utf-8") as f:
            raw = yaml.load(f)
        return self._validate(raw or {}, target)

    def _validate(self, raw, source) -> PlannerConfig:
        # YAML-Tabellen haben Integer-Schlüssel; JSON-Umweg liefert reine dicts
        try:
            return PlannerConfig.model_validate(json.loads(json.dumps(raw)))
        except ValidationError as e:
            raise ValueError(
                f"Konfigurationsdatei ungültig: {source}\n"
                f"Pydantic-Fehler: {e}"
            ) from e

    # ─── Speichern ───

    def save(self, config: PlannerConfig, path: Optional[Path] = None) -> None:
        """Speichere Config als YAML mit Kommentaren."""
        target = path or self.DEFAULT_CONFIG
        target.parent.mkdir(parents=True, exist_ok=True)

        with open(target, "w", encoding="utf-8") as f:
            f.write(_YAML_HEADER + "\n")
            yaml.dump(self._build_commented_yaml(config), f)

        console.print(f"[green]✓[/green] Konfiguration gespeichert: {target}")

    def _build_commented_yaml(self, config: PlannerConfig) -> CommentedMap:
        """Baut die YAML-Struktur mit Abschnitts-Kommentaren auf."""
        cm = CommentedMap(json.loads(config.model_dump_json()))

        for field, (label, comment) in _SECTION_COMMENTS.items():
            cm.yaml_set_comment_before_after_key(
                field,
                before=f"\n─── {label} ───" + (f"\n{comment}" if comment else ""),
            )

        if "calendar" in cm:
            cal_map = CommentedMap(cm["calendar"])
            cal_map.yaml_add_eol_comment("Schutz gegen leere Wochenpläne", "max_search_days")
            cm["calendar"] = cal_map
        return cm

    # ─── Einzelwerte ───

    def set_value(self, config: PlannerConfig, key: str, value: str) -> PlannerConfig:
        """Setzt einen Wert über einen Punkt-Pfad, z.B. 'calendar.extend_first_month'.

        Der Wert wird als YAML-Skalar gelesen ('false' → False, '4' → 4)
        und die komplette Config neu validiert.

        Raises:
            KeyError: Pfad existiert nicht.
            ValueError: Wert verletzt das Schema.
        """
        raw = json.loads(config.model_dump_json())
        *parents, leaf = key.split(".")
        node = raw
        for part in parents:
            if not isinstance(node.get(part), dict):
                raise KeyError(f"Unbekannter Konfigurationsabschnitt: {part}")
            node = node[part]
        if leaf not in node:
            raise KeyError(f"Unbekannter Konfigurationswert: {key}")
        node[leaf] = yaml.load(value)
        return self._validate(raw, key)

    # ─── Profile ───

    @property
    def _profile_index(self) -> Path:
        return self.PROFILES_DIR / _PROFILE_INDEX

    def _read_index(self) -> dict:
        if not self._profile_index.exists():
            return {}
        with open(self._profile_index, "r", encoding="utf-8") as f:
            return dict(yaml.load(f) or {})

    def save_profile(self, config: PlannerConfig, name: str,
                     description: str = "") -> None:
        """Speichert eine Config als benanntes Profil (z.B. pro Standort).

        Beschreibung und Datum landen im gemeinsamen Profil-Index.
        """
        path = self.PROFILES_DIR / f"{name}.yaml"
        if path.exists() and not Confirm.ask(
            f"Profil '{name}' existiert bereits. Überschreiben?", default=False
        ):
            console.print("[yellow]Abgebrochen.[/yellow]")
            return
        self.save(config, path)

        index = self._read_index()
        index[name] = {
            "description": description,
            "academy": config.academy_name,
            "created": date.today().isoformat(),
        }
        with open(self._profile_index, "w", encoding="utf-8") as f:
            yaml.dump(index, f)
        console.print(f"[green]✓[/green] Profil '{name}' gespeichert.")

    def list_profiles(self) -> list[dict]:
        """Alle Profile mit Metadaten aus dem Index, alphabetisch."""
        if not self.PROFILES_DIR.exists():
            return []
        index = self._read_index()
        profiles = []
        for p in sorted(self.PROFILES_DIR.glob("*.yaml")):
            if p.name == _PROFILE_INDEX:
                continue
            meta = index.get(p.stem, {})
            profiles.append({
                "name": p.stem,
                "path": str(p),
                "academy": meta.get("academy", ""),
                "description": meta.get("description", ""),
                "created": meta.get("created", ""),
            })
        return profiles

    def load_profile(self, name: str) -> PlannerConfig:
        """Lädt ein gespeichertes Profil."""
        path = self.PROFILES_DIR / f"{name}.yaml"
        if not path.exists():
            available = ", ".join(p["name"] for p in self.list_profiles()) or "keine"
            raise FileNotFoundError(f"Profil '{name}' nicht gefunden. Verfügbar: {available}")
        return self.load(path)
