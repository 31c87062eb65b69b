from __future__ import annotations

from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict


class _Record(BaseModel):
	model_config = ConfigDict(frozen=True)


class InstanceVarRef(_Record):
	name: str
	line_number: Optional[int] = None


class LocalVarRef(_Record):
	name: str
	line_number: Optional[int] = None


class MethodCallRef(_Record):
	name: str
	line_number: Optional[int] = None


class ConditionalRef(_Record):
	condition: str
	line_number: Optional[int] = None


class MethodInfo(_Record):
	name: str
	arguments: List[str] = []
	line_number: Optional[int] = None
	instance_variables: List[InstanceVarRef] = []
	local_variables: List[LocalVarRef] = []
	method_calls: List[MethodCallRef] = []
	conditionals: List[ConditionalRef] = []


class ClassInfo(_Record):
	class_name: str
	inherits_from: Optional[str] = None
	line_number: Optional[int] = None
	methods: List[MethodInfo] = []


class TopLevelInfo(_Record):
	methods: List[MethodInfo] = []


class ClassReport(_Record):
	classes: List[ClassInfo]


class TopLevelReport(_Record):
	top_level: TopLevelInfo


# Exactly one mode per analysis: classes when any class is declared, else top_level.
AnalysisReport = Union[ClassReport, TopLevelReport]


class AnalyzeRequest(BaseModel):
	code: str


class AnalyzeResponse(BaseModel):
	success: bool
	result: Optional[AnalysisReport] = None
	error: Optional[str] = None
