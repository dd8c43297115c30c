import pandas as pd
from typing import List, Dict, Any, Optional
from pathlib import Path

REQUIRED_COLUMNS = ["domain", "skill", "lesson", "prompt"]

class CurriculumParser:
    """
    Parse curriculum sheets into exercise rows.
    One row per exercise; row order is curriculum order.
    Expected columns: Domain, Unit (optional), Skill, Lesson, Prompt, Answer (optional)
    """

    @staticmethod
    def parse_csv_table(file_path: str) -> List[Dict[str, Any]]:
        """Parse CSV format curriculum sheet"""
        return CurriculumParser.parse_dataframe(pd.read_csv(file_path, dtype=str))

    @staticmethod
    def parse_excel_table(file_path: str) -> List[Dict[str, Any]]:
        """Parse Excel format curriculum sheet"""
        return CurriculumParser.parse_dataframe(pd.read_excel(file_path, dtype=str))

    @staticmethod
    def parse_dataframe(df: pd.DataFrame) -> List[Dict[str, Any]]:
        """
        Turn a sheet into curriculum rows.

        Rows missing domain, skill, lesson or prompt (or holding nan) are skipped.
        """
        # Normalize column names
        df.columns = df.columns.str.strip().str.lower()

        missing = [col for col in REQUIRED_COLUMNS if col not in df.columns]
        if missing:
            raise ValueError(f"Curriculum sheet is missing columns: {', '.join(missing)}")

        rows = []
        for _, row in df.iterrows():
            item = {
                "domain": CurriculumParser._clean(row.get("domain")),
                "unit": CurriculumParser._clean(row.get("unit")),
                "skill": CurriculumParser._clean(row.get("skill")),
                "lesson": CurriculumParser._clean(row.get("lesson")),
                "prompt": CurriculumParser._clean(row.get("prompt")),
                "answer": CurriculumParser._clean(row.get("answer")),
            }

            if all(item[col] for col in REQUIRED_COLUMNS):
                rows.append(item)

        return rows

    @staticmethod
    def _clean(value: Any) -> Optional[str]:
        """Strip cell text; empty cells and nan become None"""
        if value is None or pd.isna(value):
            return None

        text = str(value).strip()
        if not text or text.lower() == "nan":
            return None
        return text

    @staticmethod
    def auto_parse(file_path: str) -> List[Dict[str, Any]]:
        """
        Automatically detect file type and parse accordingly.
        Supports: CSV, Excel (xlsx, xls)
        """
        file_ext = Path(file_path).suffix.lower()

        if file_ext == ".csv":
            return CurriculumParser.parse_csv_table(file_path)
        elif file_ext in [".xlsx", ".xls"]:
            return CurriculumParser.parse_excel_table(file_path)
        else:
            raise ValueError(f"Unsupported file format: {file_ext}. Use .csv or .xlsx")
