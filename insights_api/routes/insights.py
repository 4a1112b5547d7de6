from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Request

from ..models import ApiResponse, DashboardStats, InsightSummary, TopInsight
from ..services.insight_svc import InsightService

router = APIRouter()


def get_service(request: Request) -> InsightService:
    return request.app.state.insight_service


@router.get("/api/insights/summary", response_model=ApiResponse[List[InsightSummary]])
def api_insights_summary(svc: InsightService = Depends(get_service)):
    return svc.get_summary()

@router.get("/api/insights/dashboard", response_model=ApiResponse[DashboardStats])
def api_insights_dashboard(svc: InsightService = Depends(get_service)):
    return svc.get_dashboard()

@router.get("/api/insights/top-positive", response_model=ApiResponse[List[InsightSummary]])
def api_insights_top_positive(svc: InsightService = Depends(get_service)):
    return svc.get_top_positive()

@router.get("/api/insights/top-negative", response_model=ApiResponse[List[InsightSummary]])
def api_insights_top_negative(svc: InsightService = Depends(get_service)):
    return svc.get_top_negative()

@router.get("/api/insights/top-10", response_model=ApiResponse[List[TopInsight]])
def api_insights_top_10(svc: InsightService = Depends(get_service)):
    return svc.get_top_insights()

# 路径参数缺失（/api/insights/）时同样走 get_by_word，由服务层判定 400
@router.get("/api/insights/", response_model=ApiResponse[List[InsightSummary]])
def api_insights_word_missing(svc: InsightService = Depends(get_service)):
    return svc.get_by_word(None)

# 必须放在固定路径之后注册，否则会吞掉 summary / dashboard 等
@router.get("/api/insights/{word}", response_model=ApiResponse[List[InsightSummary]])
def api_insights_by_word(word: str, svc: InsightService = Depends(get_service)):
    return svc.get_by_word(word)
