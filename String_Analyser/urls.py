from django.urls import path
from .store import RecordStore
from .views import StringAnalyzerView, StringDetailView, NaturalLanguageFilterView

# One store per process, shared by every string endpoint.
store = RecordStore()

urlpatterns = [
    path('strings', StringAnalyzerView.as_view(store=store), name='analyze_string'),
    path('strings/filter-by-natural-language',
         NaturalLanguageFilterView.as_view(store=store), name='nl_filter'),
    path('strings/<path:value>', StringDetailView.as_view(store=store), name='get_string'),

]
