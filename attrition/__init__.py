"""Employee attrition: encoding, stratified split and classifier comparison."""

from .comparison import Comparison, compare, mcnemar
from .data import Split, encode, load_dataset, split_dataset
from .errors import AttritionError, InsufficientDataError, SchemaError, ZeroVarianceWarning
from .evaluation import ConfusionMatrix, Evaluation, evaluate
from .models import FittedModel, k_sweep, knn, logistic_regression, naive_bayes, train
from .tree import decision_tree, prune, random_forest

__version__ = "0.1.0"
