"""
Portfolio Advisor API Server
Questionnaire in, mock portfolio recommendation out.

Run: uvicorn src.api.server:app --reload
"""

from functools import lru_cache

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from src.analysis.portfolio import PortfolioAssembler
from src.analysis.questionnaire import list_questions
from src.config import SETTINGS
from src.errors import InvalidAnswerError
from src.reports.renderer import PortfolioReportRenderer
from src.utils.logger import setup_logger

logger = setup_logger("api", SETTINGS.get("app", {}).get("log_level", "INFO"))

app = FastAPI(title="Portfolio Advisor API", version="1.0.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


class QuestionnaireRequest(BaseModel):
    answers: dict[str, str] = Field(default_factory=dict)


@lru_cache(maxsize=1)
def get_assembler() -> PortfolioAssembler:
    return PortfolioAssembler()


@lru_cache(maxsize=1)
def get_renderer() -> PortfolioReportRenderer:
    return PortfolioReportRenderer()


def _assemble(assembler: PortfolioAssembler, answers: dict[str, str]):
    try:
        return assembler.assemble(answers)
    except InvalidAnswerError as e:
        logger.warning("Rejected questionnaire: %s", e)
        raise HTTPException(status_code=400, detail=str(e))


@app.get("/api/health")
def health():
    return {"status": "ok"}


@app.get("/api/questions")
def questions():
    return {"questions": list_questions()}


@app.post("/api/portfolio")
def portfolio(req: QuestionnaireRequest, assembler: PortfolioAssembler = Depends(get_assembler)):
    result = _assemble(assembler, req.answers)
    return {"success": True, "data": result.to_dict()}


@app.post("/api/report")
def report(
    req: QuestionnaireRequest,
    assembler: PortfolioAssembler = Depends(get_assembler),
    renderer: PortfolioReportRenderer = Depends(get_renderer),
):
    result = _assemble(assembler, req.answers)
    return {"success": True, "report": renderer.render(result), "data": result.to_dict()}
