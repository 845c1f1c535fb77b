import click
from flask.cli import with_appcontext

from scisubmit.extensions import db
from scisubmit.models import Category, Question
from scisubmit.models.enumerations import QuestionType

DEFAULT_CATEGORIES = [
    "Biológia, ekológia a environmentalistika",
    "Geografia a regionálny rozvoj a geológia",
    "Informatika",
    "Chémia, fyzika a matematika",
    "Odborová didaktika",
    "PhD",
]

_RATING = {"min": 1, "max": 6}

DEFAULT_QUESTIONS = [
    ("Aktuálnosť a náročnosť práce.", QuestionType.RATING, _RATING, "Obsah práce"),
    ("Zorientovanie sa študenta v danej problematike prostredníctvom analýzou domácej a zahraničnej literatúry.",
     QuestionType.RATING, _RATING, "Obsah práce"),
    ("Vhodnosť zvolených metód spracovania riešenej problematiky.", QuestionType.RATING, _RATING, "Obsah práce"),
    ("Rozsah a úroveň dosiahnutých výsledkov.", QuestionType.RATING, _RATING, "Obsah práce"),
    ("Analýza a interpretácia výsledkov a formulácia záverov práce.", QuestionType.RATING, _RATING, "Obsah práce"),
    ("Prehľadnosť a logická štruktúra práce.", QuestionType.RATING, _RATING, "Štruktúra práce"),
    ("Formálna, jazyková a štylistická úroveň práce.", QuestionType.RATING, _RATING, "Štruktúra práce"),
    ("Práca zodpovedá šablóne určenej pre ŠVK.", QuestionType.YES_NO, {}, "Dodržiavanie pravidiel"),
    ("Chýba názov práce v slovenskom alebo anglickom jazyku.", QuestionType.YES_NO, {}, "Dodržiavanie pravidiel"),
    ("Chýba meno autora alebo školiteľa.", QuestionType.YES_NO, {}, "Dodržiavanie pravidiel"),
    ("Chýba pracovná emailová adresa autora alebo školiteľa.", QuestionType.YES_NO, {}, "Dodržiavanie pravidiel"),
    ("Chýba abstrakt v slovenskom alebo anglickom jazyku.", QuestionType.YES_NO, {}, "Dodržiavanie pravidiel"),
    ("Abstrakt nespĺňa rozsah 100–150 slov.", QuestionType.YES_NO, {}, "Dodržiavanie pravidiel"),
    ("Chýbajú kľúčové slová v slovenskom alebo anglickom jazyku.", QuestionType.YES_NO, {}, "Dodržiavanie pravidiel"),
    ("Chýba „Úvod“, „Výsledky a diskusia“ alebo „Záver“.", QuestionType.YES_NO, {}, "Dodržiavanie pravidiel"),
    ("Nie sú uvedené zdroje a použitá literatúra.", QuestionType.YES_NO, {}, "Dodržiavanie pravidiel"),
    ("V texte chýbajú referencie na zoznam bibliografie.", QuestionType.YES_NO, {}, "Dodržiavanie pravidiel"),
    ("V texte chýbajú referencie na použité obrázky a/alebo tabuľky.", QuestionType.YES_NO, {},
     "Dodržiavanie pravidiel"),
    ("Obrázkom a/alebo tabuľkám chýba popis.", QuestionType.YES_NO, {}, "Dodržiavanie pravidiel"),
    ("Prínos (silné stránky) práce.", QuestionType.TEXT, {}, "Hodnotenie"),
    ("Nedostatky (slabé stránky) práce.", QuestionType.TEXT, {}, "Hodnotenie"),
]


def seed_defaults() -> dict:
    """Insert missing default categories and questions; returns how many of each were added."""
    existing = {name for (name,) in db.session.query(Category.name).all()}
    categories = [Category(name=name, is_active=True) for name in DEFAULT_CATEGORIES if name not in existing]
    db.session.add_all(categories)

    known = {text for (text,) in db.session.query(Question.text).all()}
    questions = [
        Question(text=text, type=question_type, options=dict(options), category=category)
        for text, question_type, options, category in DEFAULT_QUESTIONS
        if text not in known
    ]
    db.session.add_all(questions)
    db.session.commit()
    return {"categories": len(categories), "questions": len(questions)}


@click.command("seed")
@with_appcontext
def seed_command():
    """Seed default categories and review questions (safe to re-run)."""
    added = seed_defaults()
    click.echo(f"Seeded {added['categories']} categories and {added['questions']} questions.")
